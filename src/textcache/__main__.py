from textcache.server import main

main()
