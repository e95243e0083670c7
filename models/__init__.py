from .user_model import UserModel
from .award_model import Award
from .nomination_model import Nomination
from .final_vote_model import FinalVote

__all__ = ['UserModel', 'Award', 'Nomination', 'FinalVote']
