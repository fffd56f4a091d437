"""Filter payload parsing, tokenization and criterion normalization."""
