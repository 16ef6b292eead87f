"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    └── golden/order_service/   status machine, validators, totals, models

Usage:
    pytest tests/unit -v
"""
import os
import sys

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
