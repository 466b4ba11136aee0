DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"
# Separates the head of an HTTP message from its body
EOH: bytes = b"\r\n\r\n"

# EOF
