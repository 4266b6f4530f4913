"""triagecli: fetch patient vitals, classify risk and submit the alert lists."""

__version__ = "0.1.0"
