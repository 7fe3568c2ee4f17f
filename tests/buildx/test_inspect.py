import json

from buildxsetup.buildx import parse_inspect


MULTI_NODE = """\
Name:          builder-1
Driver:        remote
Last Activity: 2022-09-01 12:03:00 +0000 UTC

Nodes:
Name:           builder-10
Endpoint:       tcp://buildkit-a:1234
Driver Options: cacert="/creds/cacert_buildkit-a-1234.pem" servername="bk"
Status:         running
Buildkit:       v0.10.4
Platforms:      linux/amd64*, linux/arm64*, linux/386

Name:      builder-11
Endpoint:  tcp://buildkit-b:1234
Status:    inactive
Platforms:
"""


class TestParseInspect:

    def test_header_and_nodes(self):
        builder = parse_inspect(MULTI_NODE)

        assert builder.name == "builder-1"
        assert builder.driver == "remote"
        assert builder.last_activity is not None
        assert [n.name for n in builder.nodes] == ["builder-10", "builder-11"]

    def test_node_fields(self):
        node = parse_inspect(MULTI_NODE).first_node

        assert node.endpoint == "tcp://buildkit-a:1234"
        assert node.driver_opts == ["cacert=/creds/cacert_buildkit-a-1234.pem", "servername=bk"]
        assert node.status == "running"
        assert node.buildkit == "v0.10.4"

    def test_starred_platforms_win(self):
        assert parse_inspect(MULTI_NODE).first_node.platforms == "linux/amd64,linux/arm64"

    def test_unstarred_platforms_all_kept(self):
        text = "Name: b\nDriver: docker\n\nNodes:\nName: b\nPlatforms: linux/amd64, linux/386\n"
        assert parse_inspect(text).first_node.platforms == "linux/amd64,linux/386"

    def test_empty_values_skipped(self):
        second = parse_inspect(MULTI_NODE).nodes[1]
        assert second.platforms is None
        assert second.status == "inactive"

    def test_no_nodes(self):
        builder = parse_inspect("Name: b\nDriver: docker-container\n")
        assert builder.nodes == []
        assert builder.first_node is None

    def test_nodes_json_uses_dashed_keys(self):
        nodes = json.loads(parse_inspect(MULTI_NODE).nodes_json())

        assert nodes[0]["driver-opts"][1] == "servername=bk"
        assert "driver_opts" not in nodes[0]
        assert "platforms" not in nodes[1]

    def test_newer_buildkit_labels(self):
        text = (
            "Name: b\nDriver: docker-container\nNodes:\nName: b0\n"
            "BuildKit daemon flags: --debug\n"
            "BuildKit version:      v0.12.5\n"
        )
        node = parse_inspect(text).first_node
        assert node.buildkitd_flags == "--debug"
        assert node.buildkit == "v0.12.5"

    def test_flags(self):
        text = "Name: b\nDriver: docker-container\nNodes:\nName: b0\nFlags: --debug --allow-insecure-entitlement network.host\n"
        assert parse_inspect(text).first_node.buildkitd_flags == "--debug --allow-insecure-entitlement network.host"
