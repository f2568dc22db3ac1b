"""multiversx governance vote tally: decode on-chain vote events and aggregate them"""

__version__ = "0.1.0"
