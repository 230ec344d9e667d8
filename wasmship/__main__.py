from wasmship.cli.app import main

main()
