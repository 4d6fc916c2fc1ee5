from cortexevents.cli.main import main

main()
