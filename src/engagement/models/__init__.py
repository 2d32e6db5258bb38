from .poll import PollQuestion, QuestionType
from .media import Photo, Review
from .survey import Survey, SurveyResponse, SurveyQuestionType
from .certificate import Certificate, CertificateType
