"""
External service integrations: geocoders, IPFS pinning services and the
compressed NFT RPC.
"""
