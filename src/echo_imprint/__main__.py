from echo_imprint.cli import main

main()
