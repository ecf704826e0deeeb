# File: src/lotsim/presentation/__init__.py
