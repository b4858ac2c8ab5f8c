from multitrack_visualizer.cli import main

raise SystemExit(main())
