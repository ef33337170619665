# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
from sys import exit
from . import Simulation

if __name__ == "__main__":
    exit(0 if Simulation.run(Simulation()) else 1)
