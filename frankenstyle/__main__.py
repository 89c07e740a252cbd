from frankenstyle.cli import main

raise SystemExit(main())
