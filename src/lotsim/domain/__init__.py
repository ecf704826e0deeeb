# File: src/lotsim/domain/__init__.py
