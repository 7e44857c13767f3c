"""
NFTrek - geo-tagged photo minting as compressed NFTs.

This package provides the mint orchestration pipeline with:
- Location resolution from client-reported geolocation fixes
- Cascading reverse geocoding (OpenCage, Nominatim)
- Cascading image persistence (NFT.Storage, Pinata) with an embedded fallback
- Compressed NFT minting and verification over JSON-RPC
- A FastAPI server streaming pipeline progress to the UI
"""

__version__ = "0.1.0"
__author__ = "NFTrek Team"
