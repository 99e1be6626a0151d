# x_unigram/schema/__init__.py
from .vocab import VocabPiece, VocabStats
from .trainer_config import UnigramTrainerConfig
