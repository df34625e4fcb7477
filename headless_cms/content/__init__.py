"""
Content entries, media references and relations.
"""
