from postgres_mcp.server import main

main()
