"""
Configuration module for the 25k Subscription Transactions experiment.
Extends global settings with workload-specific constants.
"""
from config import *

SUBSCRIPTION_TRANSACTIONS: int = 25_000
SUBSCRIPTION_TOKEN_ID: int = 1  # first ERC20 registered by deposit
ERC20_TOTAL_SUPPLY: int = 0xFFFFFFFFF
DEPOSIT_AMOUNT: int = 1000
