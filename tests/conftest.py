import pytest  # type: ignore[import]

EXAM_TEXT = """Topic 1 Question #1
Which service stores objects durably?
A. Amazon EC2
B. Amazon S3
C. Amazon RDS
D. AWS Lambda
Correct Answer: B
user1 Highly Voted 2 years, 1 month ago
Selected Answer: B
S3 is object storage
upvoted 12 times
bob 1 year ago
Agree with B
upvoted 3 times

Question #2
Pick two relational databases.
A. DynamoDB
B. CloudFront
C. Aurora
D. Route 53
Correct Answer: AC
Question #3
Which are serverless? (Choose two.)
A. Lambda
B. EC2
C. Fargate
Correct Answer: A, C
Explanation: Lambda and Fargate run without servers.
Question #4
This block has no options https://example.com/q4
Correct Answer: A
"""


@pytest.fixture
def exam_text():
    return EXAM_TEXT
