from statefuzz.cli import main

main()
