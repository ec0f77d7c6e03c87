"""NiceGUI interface - thin visualization layer for the chat session.

Responsibilities:
    - Render session snapshots: text, markdown, generated images, errors
    - Forward user input and reset requests to the session controller
    - Reach the API through ApiModelClient (SSE streaming, image requests)

Contains no conversation logic. Remains a pure presentation layer.
"""
