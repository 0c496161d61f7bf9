"""
shopledger.notifications

Transactional email: message templates, the relay client used by identity flows and the
mail transports behind the relay endpoint.
"""

# Package marker.
