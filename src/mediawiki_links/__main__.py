from mediawiki_links.cli import main

main()
