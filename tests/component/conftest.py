"""
Component Test Layer Configuration

Structure:
    tests/component/
    └── golden/order_service/   OrderService with in-memory and mocked stores

Usage:
    pytest tests/component -v
"""
import os
import sys

# Set testing environment BEFORE any imports
os.environ.setdefault("ENV", "testing")

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
