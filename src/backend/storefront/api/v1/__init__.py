"""API v1 routers - products, account, cart and negotiation wizard"""
