from addondebug.cli import main

raise SystemExit(main())
