from enso_haiku.app import main

main()
