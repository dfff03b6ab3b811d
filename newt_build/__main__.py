from newt_build.orchestrator import main

main()
