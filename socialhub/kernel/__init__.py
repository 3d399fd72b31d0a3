"""
SocialHub kernel: models, identity, post lifecycle, sharing and the social graph.
"""
