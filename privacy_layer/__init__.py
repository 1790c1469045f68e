"""
Privacy layer — outbound request gateway and encrypted credential vault.

    from privacy_layer.gateway import PrivacyGateway
    from privacy_layer.vault import SecureVault
"""
