from hostdeploy.main import main

main()
