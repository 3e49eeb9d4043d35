"""
errors.py
======================

問題バンクとクイズエンジンが送出する例外の一覧。

すべて QuizError を基底とし、UI 側は QuizError だけを捕捉すればよい。
エンジン系の例外はセッション状態を一切変更せずに送出される。
"""


class QuizError(Exception):
    pass


class QuestionValidationError(QuizError):
    pass


class EmptyBankError(QuizError):
    pass


class OutOfRangeIndexError(QuizError):
    pass


class InvalidSelectionError(QuizError):
    pass


class NoSelectionError(QuizError):
    pass


class AlreadySubmittedError(QuizError):
    pass


class NotReviewedError(QuizError):
    pass


class QuizFinishedError(QuizError):
    pass


class QuizNotFinishedError(QuizError):
    pass
