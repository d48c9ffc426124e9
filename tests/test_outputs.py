from blueprints.account_config import resolve
from blueprints.outputs import as_dict, project_account_config, project_website
from blueprints.website.policy import build_website

from conftest import ACCOUNTS


class TestOutputs:
    def test_website_outputs(self):
        topology = build_website({"domainName": "mysite.example.com", "hostedZoneId": "Z1"})
        outputs = as_dict(project_website(topology))

        assert outputs == {
            "WebsiteUrl": "https://mysite.example.com",
            "BucketName": "${WebsiteBucket.name}",
            "DistributionId": "${Distribution.id}",
            "CertificateArn": "${Certificate.arn}",
            "WebAclArn": "${WebACL.arn}",
        }

    def test_website_outputs_follow_options(self):
        topology = build_website(
            {
                "domainName": "mysite.example.com",
                "hostedZoneId": "Z1",
                "enableWaf": False,
                "enableLogging": True,
            }
        )
        names = [output.name for output in project_website(topology)]
        assert "WebAclArn" not in names
        assert names[-1] == "LogsBucketName"

    def test_account_outputs(self):
        outputs = as_dict(project_account_config(resolve(ACCOUNTS, "123456789012")))
        assert outputs == {
            "AccountId": "123456789012",
            "ParameterPrefix": "/account-config/123456789012",
            "ConfigKeys": "stage,zone",
            "StageParameterArn": "${ParameterStage.arn}",
            "ZoneParameterArn": "${ParameterZone.arn}",
        }
