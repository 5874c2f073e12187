from poisson3d.cli import main

raise SystemExit(main())
