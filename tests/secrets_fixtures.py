# SPDX-License-Identifier: MIT
"""
Sample secrets for tests.

Values are assembled from pieces so this file does not trip scanners itself.
"""

AWS_KEY = "AKIA" + "_FAKE_ACCESS_KEY"
AWS_KEY_ALNUM = "AKIA" + "ABCDEFGHIJKLMNOP"
AWS_SECRET_LINE = 'aws_secret_access_key = "' + "A" * 40 + '"'
GITHUB_TOKEN = "ghp" + "_" + "a" * 36
STRIPE_KEY = "sk" + "_live_" + "0" * 24
SLACK_TOKEN = "xo" + "xb-" + "1" * 12
GOOGLE_KEY = "AI" + "za" + "B" * 35
PRIVATE_KEY_HEADER = "-----BEGIN RSA " + "PRIVATE KEY-----"
JWT = "ey" + "JhbGciOiJIUzI1NiJ9.eyJzdWIiOiIxMjM0In0.c2lnbmF0dXJl"
PASSWORD_LINE = 'password = "' + "hunter22" + '"'
