"""
NH Console - Referral Models

A Referral is created when a referred customer pays an order:
    Completed → RewardPaid (terminal)
"""

from enum import Enum


class ReferralStatus(str, Enum):
    COMPLETED = "Completed"      # Referred customer paid, reward owed
    REWARD_PAID = "RewardPaid"   # Reward settled


VALID_REFERRAL_TRANSITIONS = {
    "Completed": ["RewardPaid"],
    "RewardPaid": [],
}
