"""pullchunk - acknowledgement-gated chunk transfer

Sources are split into fixed-size chunks that a consumer pulls one at a
time, acknowledging each chunk before the next one becomes readable.
"""

__version__ = "1.0.0"
