"""
Giftlist request/response schemas.
"""
