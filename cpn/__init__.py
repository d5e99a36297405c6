"""
Counter-Propagation Network (CPN)
=================================

A PyTorch implementation of the competitive (instar) half of a Counter-Propagation Network.

This package implements the unsupervised layer of a CPN, where a set of instar units compete
for every input exemplar and only the winning unit moves its weight vector toward that
exemplar. Training reports the worst quantization distance of each pass as its error.
"""

__version__ = '0.1.0'
