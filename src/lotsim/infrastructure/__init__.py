# File: src/lotsim/infrastructure/__init__.py
