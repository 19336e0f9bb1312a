from memlayout.report.cli import main

main()
