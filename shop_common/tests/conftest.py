"""
Pytest configuration for shop_common. A fixed signing secret so tokens are reproducible.
"""
import os

os.environ["SHOP_JWT_SECRET"] = "test-signing-secret-0123456789abcdefghijklmnop"
