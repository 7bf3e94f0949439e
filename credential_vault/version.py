"""Credential Vault Meta information.
   Credential Vault encrypts service credentials into versioned, tamper-evident envelopes.
"""
__title__ = 'credential_vault'
__description__ = (
   'Credential Vault encrypts service credentials into versioned, '
   'tamper-evident envelopes.'
)
__version__ = '1.0.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/credential-vault'
