from sensor_merge.cli import main

raise SystemExit(main())
