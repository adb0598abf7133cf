"""Text of the generated artifacts.

Every renderer is a pure function of :class:`~ofnode.config.ProjectConfig`,
so identical configuration always yields identical bytes.
"""
# ruff: noqa: E501

from __future__ import annotations

from string import Template
from typing import Any

import yaml

from ofnode.config import ProjectConfig

__all__ = [
    "DOCKERIGNORE_EXCLUDES",
    "TEMPLATE_LANGUAGE",
    "WELCOME_MESSAGE",
    "render_bootstrap",
    "render_dockerfile",
    "render_dockerignore",
    "render_handler",
    "render_template_descriptor",
    "template_descriptor",
]

TEMPLATE_LANGUAGE = "node12"
NODE_BASE_IMAGE = "node:12-alpine"
DEFAULT_PORT = 3000
DOCKERIGNORE_EXCLUDES = ("*/node_modules",)

WELCOME_MESSAGE = """\
You have created a new function which uses Node.js 12 (TLS) and the OpenFaaS
of-watchdog which gives greater control over HTTP responses.
npm i --save can be used to add third-party packages like request or cheerio
npm documentation: https://docs.npmjs.com/
Unit tests are run at build time via "npm run", edit package.json to specify
how you want to execute them.
"""

_DOCKERFILE = Template("""\
FROM --platform=$${TARGETPLATFORM:-linux/amd64} openfaas/of-watchdog:$watchdog_tag as watchdog
FROM --platform=$${TARGETPLATFORM:-linux/amd64} $node_image as ship

ARG TARGETPLATFORM
ARG BUILDPLATFORM

COPY --from=watchdog /fwatchdog /usr/bin/fwatchdog
RUN chmod +x /usr/bin/fwatchdog

RUN apk --no-cache add curl ca-certificates \\
    && addgroup -S app && adduser -S -g app app

WORKDIR /root/

# Turn down the verbosity to default level.
ENV NPM_CONFIG_LOGLEVEL warn

RUN mkdir -p /home/app

# Wrapper/boot-strapper
WORKDIR /home/app
COPY package.json ./

# This ordering means the npm installation is cached for the outer function handler.
RUN npm i

# Copy outer function handler
COPY index.js ./

# COPY function node packages and install, adding this as a separate
# entry allows caching of npm install

WORKDIR /home/app/$func_dir

COPY $func_dir/*.json ./

RUN npm i || :

# COPY function files and folders
COPY $func_dir/ ./

# Run any tests that may be available
RUN npm test

# Set correct permissions to use non root user
WORKDIR /home/app/

# chmod for tmp is for a buildkit issue (@alexellis)
RUN chown app:app -R /home/app \\
    && chmod 777 /tmp

USER app

ENV cgi_headers="true"
ENV fprocess="node index.js"
ENV mode="http"
ENV upstream_url="http://127.0.0.1:3000"

ENV exec_timeout="10s"
ENV write_timeout="15s"
ENV read_timeout="15s"

HEALTHCHECK --interval=3s CMD [ -e /tmp/.lock ] || exit 1

CMD ["fwatchdog"]
""")

_BOOTSTRAP = Template("""\
// Copyright (c) Alex Ellis 2017. All rights reserved.
// Copyright (c) OpenFaaS Author(s) 2020. All rights reserved.
// Licensed under the MIT license. See LICENSE file in the project root for full license information.

"use strict"

const express = require('express')
const app = express()
const handler = require('$handler_module');
const bodyParser = require('body-parser')

if (process.env.RAW_BODY === 'true') {
    app.use(bodyParser.raw({ type: '*/*' }))
} else {
    var jsonLimit = process.env.MAX_JSON_SIZE || '100kb' //body-parser default
    app.use(bodyParser.json({ limit: jsonLimit}));
    app.use(bodyParser.raw()); // "Content-Type: application/octet-stream"
    app.use(bodyParser.text({ type : "text/*" }));
}

app.disable('x-powered-by');

class FunctionEvent {
    constructor(req) {
        this.body = req.body;
        this.headers = req.headers;
        this.method = req.method;
        this.query = req.query;
        this.path = req.path;
    }
}

class FunctionContext {
    constructor(cb) {
        this.value = 200;
        this.cb = cb;
        this.headerValues = {};
        this.cbCalled = 0;
    }

    status(value) {
        if(!value) {
            return this.value;
        }

        this.value = value;
        return this;
    }

    headers(value) {
        if(!value) {
            return this.headerValues;
        }

        this.headerValues = value;
        return this;
    }

    succeed(value) {
        let err;
        this.cbCalled++;
        this.cb(err, value);
    }

    fail(value) {
        let message;
        this.cbCalled++;
        this.cb(value, message);
    }
}

var middleware = async (req, res) => {
    let cb = (err, functionResult) => {
        if (err) {
            console.error(err);

            return res.status(500).send(err.toString ? err.toString() : err);
        }

        if(isArray(functionResult) || isObject(functionResult)) {
            res.set(fnContext.headers()).status(fnContext.status()).send(JSON.stringify(functionResult));
        } else {
            res.set(fnContext.headers()).status(fnContext.status()).send(functionResult);
        }
    };

    let fnEvent = new FunctionEvent(req);
    let fnContext = new FunctionContext(cb);

    Promise.resolve(handler(fnEvent, fnContext, cb))
    .then(res => {
        if(!fnContext.cbCalled) {
            fnContext.succeed(res);
        }
    })
    .catch(e => {
        cb(e);
    });
};

app.post('/*', middleware);
app.get('/*', middleware);
app.patch('/*', middleware);
app.put('/*', middleware);
app.delete('/*', middleware);
app.options('/*', middleware);

const port = process.env.http_port || $default_port;

app.listen(port, () => {
    console.log(`OpenFaaS Node.js listening on port: $${port}`)
});

let isArray = (a) => {
    return (!!a) && (a.constructor === Array);
};

let isObject = (a) => {
    return (!!a) && (a.constructor === Object);
};
""")

_HANDLER = """\
'use strict'

module.exports = async (event, context) => {
  const result = {
    'status': 'Received input: ' + JSON.stringify(event.body)
  }

  return context
    .status(200)
    .succeed(result)
}
"""


class _DescriptorDumper(yaml.SafeDumper):
    """Dumps multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> Any:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_DescriptorDumper.add_representer(str, _represent_str)


def render_dockerfile(config: ProjectConfig) -> str:
    return _DOCKERFILE.substitute(
        watchdog_tag=config.watchdog_image_tag,
        node_image=NODE_BASE_IMAGE,
        func_dir=config.func_dir,
    )


def render_bootstrap(config: ProjectConfig) -> str:
    return _BOOTSTRAP.substitute(
        handler_module=config.handler_module,
        default_port=DEFAULT_PORT,
    )


def render_handler(config: ProjectConfig) -> str:
    return _HANDLER


def template_descriptor(config: ProjectConfig) -> dict[str, str]:
    """The ``template.yml`` document."""
    return {
        "language": TEMPLATE_LANGUAGE,
        "fprocess": f"node {config.func_handler}",
        "welcome_message": WELCOME_MESSAGE,
    }


def render_template_descriptor(config: ProjectConfig) -> str:
    return yaml.dump(
        template_descriptor(config),
        Dumper=_DescriptorDumper,
        default_flow_style=False,
        sort_keys=False,
    )


def render_dockerignore(config: ProjectConfig) -> str:
    return "".join(f"{pattern}\n" for pattern in DOCKERIGNORE_EXCLUDES)
