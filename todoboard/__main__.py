from todoboard.main import main

raise SystemExit(main())
