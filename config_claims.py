"""
Configuration module for the 100k Points Claims experiment.
Extends global settings with workload-specific constants.
"""
from config import *

CLAIM_USERS: int = 100_000
OUTPUTS_PER_DISPERSAL_TX: int = 8
CLAIMS_TOKEN_ID: int = 0  # native ether
