"""
bnferris

Generates random messages from grammars written in a mix of BNF and ABNF,
for fuzzing and test-data generation.
"""

__version__ = "0.1.0"
