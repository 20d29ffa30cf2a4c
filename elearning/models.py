"""
E-Learning Application Models Registry

This module serves as the central models registry for the E-Learning application.
It imports and exposes all models from the logical submodules (courses, final_exam,
certificates, activity) to ensure they are properly registered with Django's ORM
system under the single ``elearning`` app label.

Architecture:
- courses/: Courses and learner enrollments (progress, completion)
- final_exam/: Question bank, test attempts and buffered answers
- certificates/: Issued course certificates
- activity/: Append-only learner activity history

Author: DSP Development Team
Version: 1.0.0
"""

# Import all course-related models for registration with Django ORM
from .courses.models import *

# Import all test-taking models for registration with Django ORM
from .final_exam.models import *

# Import all certificate models for registration with Django ORM
from .certificates.models import *

# Import all activity models for registration with Django ORM
from .activity.models import *
