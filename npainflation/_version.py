import os

directory_of_this_file = os.path.dirname(os.path.abspath(__file__))
# When executed from setup.py, __file__ points at the repository root
if not os.path.isfile(os.path.join(directory_of_this_file, "VERSION.txt")):
    directory_of_this_file = os.path.join(directory_of_this_file,
                                          "npainflation")

with open(os.path.join(directory_of_this_file, "VERSION.txt"), "r") as f:
    __version__ = f.read().strip()
