from kaiten_cli.cli import main

main()
