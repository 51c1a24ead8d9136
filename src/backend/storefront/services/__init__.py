"""Services package - configuration, state reducers, products and negotiation"""
