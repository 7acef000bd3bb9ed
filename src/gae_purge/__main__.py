from gae_purge.cli_main import main

raise SystemExit(main())
