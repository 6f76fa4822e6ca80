from dualsense_gui.app import main

main()
