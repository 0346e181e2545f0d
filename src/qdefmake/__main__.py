from qdefmake.cli import main

raise SystemExit(main())
