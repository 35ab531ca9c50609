from textra.app import main

main()
