"""
Launch script for the 100k Points Claims experiment.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from scenarios import exp_claims

if __name__ == "__main__":
    print("Launching Points Claims Experiment...")
    exp_claims.run()
