"""
Launch script for the 25k Subscription Transactions experiment.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from scenarios import exp_subscriptions

if __name__ == "__main__":
    print("Launching Subscription Experiment...")
    exp_subscriptions.run()
