# Resource type tags emitted into a ResourceGraph. They follow the
# CloudFormation type names so any engine binding can key off them.

HOSTED_ZONE = "AWS::Route53::HostedZone"
CERTIFICATE = "AWS::CertificateManager::Certificate"
BUCKET = "AWS::S3::Bucket"
BUCKET_POLICY = "AWS::S3::BucketPolicy"
BUCKET_DEPLOYMENT = "Custom::CDKBucketDeployment"
ORIGIN_ACCESS_CONTROL = "AWS::CloudFront::OriginAccessControl"
DISTRIBUTION = "AWS::CloudFront::Distribution"
IP_SET = "AWS::WAFv2::IPSet"
WEB_ACL = "AWS::WAFv2::WebACL"
A_RECORD = "AWS::Route53::RecordSet::A"
AAAA_RECORD = "AWS::Route53::RecordSet::AAAA"
PARAMETER = "AWS::SSM::Parameter"
