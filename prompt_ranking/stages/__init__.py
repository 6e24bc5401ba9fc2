"""
Ranking stages: search (lexical relevance), trending (popularity), recommend (personalized).
"""
