from rustbundle.installer import main_exit

main_exit()
