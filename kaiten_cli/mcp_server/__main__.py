from kaiten_cli.mcp_server import main

main()
