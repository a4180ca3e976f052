from statewrap.compiler.cli import main

raise SystemExit(main())
