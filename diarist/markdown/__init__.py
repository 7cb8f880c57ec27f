"""
Markdown rewriting package.

markdown-it-py plugins that rewrite the token tree before rendering:
- mdit_embeds: ``![[target|descriptor]]`` embeds and image path resolution
- mdit_cards: ``card`` link blocks and ``card-<media>`` media blocks
- attachments: Resolution of attachment references to public URLs
- renderer: The configured MarkdownIt instance
"""
